"""Error taxonomy shared by the services and the HTTP layer."""


class TaskBoardError(Exception):
    """Base class for errors that are shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(TaskBoardError):
    """No valid session for an operation that needs one."""

    def __init__(self, message: str = "User not found."):
        super().__init__(message)


class ValidationError(TaskBoardError):
    """Input rejected before it reaches the repository."""


class RepositoryError(TaskBoardError):
    """The task store failed; carries the backend's message."""


class TaskNotFound(RepositoryError):
    """No task with that id is visible to the current user."""

    def __init__(self, task_id: str):
        super().__init__("Task not found")
        self.task_id = task_id


class AuthError(TaskBoardError):
    """Sign-up or sign-in was refused."""
