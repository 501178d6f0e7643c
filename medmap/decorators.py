from functools import wraps

from flask import jsonify, request


def json_required(*fields: str):
    """Decorator rejecting requests whose body is not a JSON object with the given fields.

    Args:
        *fields: Keys that must be present in the JSON body

    Returns:
        The decorated function, or a 400 JSON error response
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return jsonify({"error": "Request body must be a JSON object"}), 400

            missing = [field for field in fields if field not in data]
            if missing:
                return jsonify({"error": f"Missing field(s): {', '.join(missing)}"}), 400

            return func(*args, **kwargs)

        return decorated_function

    return decorator
