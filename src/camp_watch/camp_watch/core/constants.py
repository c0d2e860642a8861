"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Group id conventions:
# - 1 is the catch-all group that contains every person
# - 2..5 are the methodology groups (Cub, Scout, Venture Scout, Rover)
# - 6 and above are user-managed groups
ALL_PERSONS_GROUP_ID = 1
FIRST_METHODOLOGY_GROUP_ID = 2
FIRST_USER_GROUP_ID = 6

ALL_PERSONS_GROUP_NAME = "All"

# UTC timestamps are stored as text in this format.
DB_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DAY_LABEL_FORMAT = "%Y-%m-%d"
ENTRY_TIME_FORMAT = "%H:%M:%S"
