"""
Error taxonomy shared by the retrieval core and the HTTP layer.

InputError    -> malformed or missing input (client error)
NotFoundError -> unknown space/document, or a space with nothing to search
ProviderError -> embedding or language-model call failed (server error)
"""


class CustomException(Exception):
    status_code: int = 500

    def __init__(self, error):
        if isinstance(error, BaseException):
            message = f"{type(error).__name__}: {error}"
        else:
            message = str(error)
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InputError(CustomException):
    status_code = 400


class NotFoundError(CustomException):
    status_code = 404


class ProviderError(CustomException):
    status_code = 502
