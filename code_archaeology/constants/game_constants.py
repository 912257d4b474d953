"""Game rule constants shared by the board, quiz and progression layers."""

GRID_COLUMNS: int = 4
GRID_ROWS: int = 3
GRID_SIZE: int = GRID_COLUMNS * GRID_ROWS

FRAGMENT_QUOTA: int = 6
BOMB_COUNT: int = 6
DEFAULT_FRAGMENT_COUNT: int = 6

QUIZ_QUESTION_COUNT: int = 5
QUIZ_PASS_THRESHOLD: int = 3
POINTS_PER_CORRECT_ANSWER: int = 10
SCORE_ACHIEVEMENT_THRESHOLD: int = 100

ERA_ORDER: tuple[str, ...] = ("fortran", "c", "python")
FIRST_ERA: str = ERA_ORDER[0]
