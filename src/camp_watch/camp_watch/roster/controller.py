from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import DomainError, DuplicateMembershipError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateMembershipError, 409),
    (StoreError, 503),
)


def register(app: Flask, container: Container) -> None:
    svc = container.roster_service

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                break
        else:
            status = 400
        if status >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.path, exc)
        return jsonify({"error": str(exc)}), status

    def payload() -> dict:
        return request.get_json(silent=True) or {}

    def state(status: int = 200, **extra):
        body = svc.projections.to_dict()
        body.update(extra)
        return jsonify(body), status

    @app.route("/api/state", methods=["GET"], endpoint="state")
    def get_state():
        return state()

    @app.route("/api/reload", methods=["POST"], endpoint="reload")
    def reload():
        svc.reload()
        return state()

    @app.route("/api/persons", methods=["POST"], endpoint="add_person")
    def add_person():
        data = payload()
        person_id = svc.add_person(
            name=data.get("name", ""),
            surname=data.get("surname", ""),
            rank=data.get("rank"),
            methodology=data.get("methodology"),
        )
        return state(201, created_id=person_id)

    @app.route("/api/persons/<int:person_id>", methods=["PUT"], endpoint="update_person")
    def update_person(person_id: int):
        data = payload()
        svc.update_person(
            person_id=person_id,
            name=data.get("name", ""),
            surname=data.get("surname", ""),
            rank=data.get("rank"),
            methodology=data.get("methodology"),
        )
        return state()

    @app.route("/api/persons/<int:person_id>", methods=["DELETE"], endpoint="delete_person")
    def delete_person(person_id: int):
        svc.delete_person(person_id)
        return state()

    @app.route("/api/groups", methods=["POST"], endpoint="add_group")
    def add_group():
        group_id = svc.add_group(payload().get("name", ""))
        return state(201, created_id=group_id)

    @app.route("/api/groups/<int:group_id>", methods=["PUT"], endpoint="rename_group")
    def rename_group(group_id: int):
        svc.rename_group(group_id=group_id, name=payload().get("name", ""))
        return state()

    @app.route("/api/groups/<int:group_id>", methods=["DELETE"], endpoint="delete_group")
    def delete_group(group_id: int):
        svc.delete_group(group_id)
        return state()

    @app.route("/api/groups/<int:group_id>/members", methods=["POST"], endpoint="add_membership")
    def add_membership(group_id: int):
        svc.add_membership(person_id=payload().get("person_id"), group_id=group_id)
        return state(201)

    @app.route("/api/groups/<int:group_id>/members/<int:person_id>", methods=["DELETE"], endpoint="remove_membership")
    def remove_membership(group_id: int, person_id: int):
        svc.remove_membership(person_id=person_id, group_id=group_id)
        return state()

    @app.route("/api/picker", methods=["PUT"], endpoint="change_picker_group")
    def change_picker_group():
        svc.change_picker_group(payload().get("group_index"))
        return state()

    @app.route("/api/selection/toggle/<int:person_id>", methods=["POST"], endpoint="toggle_selection")
    def toggle_selection(person_id: int):
        selected = svc.toggle_selection(person_id)
        return state(selected=selected)

    @app.route("/api/selection/group/<int:group_id>", methods=["POST"], endpoint="select_group")
    def select_group(group_id: int):
        svc.select_group(group_id)
        return state()

    @app.route("/api/selection", methods=["DELETE"], endpoint="clear_selection")
    def clear_selection():
        svc.clear_selection()
        return state()

    @app.route("/api/presence/check-in", methods=["POST"], endpoint="check_in")
    def check_in():
        changed = svc.check_in_selected()
        return state(changed=changed)

    @app.route("/api/presence/check-out", methods=["POST"], endpoint="check_out")
    def check_out():
        changed = svc.check_out_selected()
        return state(changed=changed)
