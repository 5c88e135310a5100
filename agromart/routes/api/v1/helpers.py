from flask import current_app, request


def request_payload():
    """JSON body, or form fields for multipart uploads."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def upload_root():
    return current_app.config["UPLOAD_DIR"]


def query_limits():
    return {
        "default_limit": current_app.config.get("QUERY_DEFAULT_LIMIT", 10),
        "max_limit": current_app.config.get("QUERY_MAX_LIMIT", 100),
    }
