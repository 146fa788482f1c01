from typing import Optional, Dict, Any


class NewsdeskError(Exception):
    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "message": self.message,
        }


class ValidationError(NewsdeskError):
    status_code = 400

    def __init__(self, errors: Dict[str, str]):
        super().__init__(
            message="Validation failed",
            error_code="VALIDATION_ERROR",
            details={"errors": errors}
        )
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status_code, "errors": self.errors}


class UploadError(NewsdeskError):
    status_code = 400

    def __init__(self, message: str, field_level: bool = True):
        super().__init__(message=message, error_code="UPLOAD_ERROR")
        self.field_level = field_level

    def to_dict(self) -> Dict[str, Any]:
        if self.field_level:
            return {"status": self.status_code, "errors": {"image": self.message}}
        return super().to_dict()


class AuthenticationError(NewsdeskError):
    status_code = 401

    def __init__(self, message: str = "Unauthenticated."):
        super().__init__(message=message, error_code="UNAUTHENTICATED")


class AuthorizationError(NewsdeskError):
    status_code = 403

    def __init__(self, message: str = "User is unauthorized."):
        super().__init__(message=message, error_code="UNAUTHORIZED")


class MissingResourceError(NewsdeskError):
    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource} not found.",
            error_code="NOT_FOUND",
            details={"resource_id": resource_id}
        )


class Fault(NewsdeskError):
    """Server-side failure. Details are logged, never returned to the caller."""

    public_message = "Something went wrong. Please try again."

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status_code, "message": self.public_message}


class StorageFault(Fault):
    pass


class PersistenceFault(Fault):
    pass
