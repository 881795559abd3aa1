class AppError(Exception):
    """A failure that should reach the client as {"success": false, "message": ...}."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MailDeliveryError(AppError):
    status_code = 500

    def __init__(self, message: str = "Failed to send mail"):
        super().__init__(message)
