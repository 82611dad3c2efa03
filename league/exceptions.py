# league/exceptions.py
"""
Error taxonomy for the scoring engine.

InvalidInput and NotFound are raised before anything is written. FailedPrecondition
guards the match-day lock and is never bypassed. Conflict means another submission
for the same season is in flight; retry once it finishes.
"""


class LeagueError(Exception):
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class InvalidInput(LeagueError):
    status_code = 400


class NotFound(LeagueError):
    status_code = 404


class FailedPrecondition(LeagueError):
    status_code = 412


class Conflict(LeagueError):
    status_code = 409
    retryable = True
