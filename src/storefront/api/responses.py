"""The JSON envelope every endpoint answers with: ``{success, data?, message?, error?}``."""


def success(data=None, message=None) -> dict:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def failure(message, error, errors=None) -> dict:
    body = {"success": False, "message": message, "error": error}
    if errors:
        body["errors"] = errors
    return body
