"""Event kind constants.

Learn: These strings become the "type" field of every frame's envelope.
Game display clients switch on them, so renaming one is a breaking change.
"""

# A team hit its buzzer. Payload: the team's signal letter ("A").
SIGNAL = "signal"

# Score pushed from a URL hit. Payload: {"sig": "A", "score": 10}.
SCORE = "score"

# Full team list replaced from the admin page. Payload: list of teams.
TEAMS = "teams"

# Relative score change for one team. Payload: {"teamName", "scoreChange"}.
SCORE_UPDATE = "score_update"
