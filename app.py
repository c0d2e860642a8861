from camp_watch.main import create_app

app = create_app()


if __name__ == "__main__":
    # One request at a time: the roster service owns its caches on a single thread.
    app.run(debug=bool(app.config.get("DEBUG")), threaded=False, use_reloader=False)
