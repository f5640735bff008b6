class RewriteError(Exception):
    """Base error for the writing coach."""


class LessonStateError(RewriteError):
    """An action was requested in a state that does not allow it."""

    def __init__(self, action: str, state: str, detail: str = ""):
        self.action = action
        self.state = state
        msg = f"cannot {action} while {state}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class ConfigurationError(RewriteError):
    pass
