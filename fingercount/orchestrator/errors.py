ERR_BUSY = "BUSY"
ERR_CREDENTIAL_MISSING = "CREDENTIAL_MISSING"
ERR_CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"
ERR_INFERENCE = "INFERENCE_ERROR"


class FingerCountError(Exception):
    code = "UNKNOWN"


class CredentialMissing(FingerCountError):
    """Inference client has no usable credential; raised before any network call."""
    code = ERR_CREDENTIAL_MISSING


class CameraUnavailable(FingerCountError):
    """Permission denied, no device, or the device refused to open."""
    code = ERR_CAMERA_UNAVAILABLE


class IllegalTransition(FingerCountError):
    code = "ILLEGAL_TRANSITION"
