from fastapi.responses import JSONResponse


def success_response(data=None, status=200):
    return JSONResponse(
        status_code=status,
        content={"success": True, **(data or {})}
    )


def error_response(error, status=400, message=None):
    content = {"error": error}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status, content=content)
