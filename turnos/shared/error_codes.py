# turnos/shared/error_codes.py
# Central mapping for the error contract.
# Keep keys stable: API clients rely on these.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 422,
        "message": "Validation failed for one or more fields."
    },
    "invalid_input": {
        "http": 400,
        "message": "Invalid request data."
    },

    # ─── Authentication & Authorization ────────────────────────────────────
    "unauthorized": {
        "http": 401,
        "message": "Unauthorized. Please provide valid credentials."
    },
    "invalid_credentials": {
        "http": 401,
        "message": "Invalid credentials."
    },
    "expired_token": {
        "http": 401,
        "message": "Token expired."
    },
    "invalid_token": {
        "http": 401,
        "message": "Invalid token."
    },
    "forbidden": {
        "http": 403,
        "message": "You are not allowed to perform this action."
    },

    # ─── Resources ─────────────────────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "conflict": {
        "http": 409,
        "message": "Resource already exists or conflicts with current state."
    },
    "slot_taken": {
        "http": 409,
        "message": "There is already a confirmed appointment in that slot."
    },

    # ─── Server ────────────────────────────────────────────────────────────
    "internal_error": {
        "http": 500,
        "message": "Internal server error."
    },
}
