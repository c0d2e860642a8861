"""Camp Watch package.

Tracks camp members, their groups and whether they are inside or outside the camp.
Organized by feature modules (persons, groups, presence, roster) with a thin Flask
controller layer over service/repository layers.
"""
