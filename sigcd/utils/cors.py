"""
CORS Configuration
The React front end is served from a different origin.
"""

CORS_CONFIG = {
    "origins": "*",
    "methods": ["GET", "POST", "PUT", "OPTIONS"],
    "allow_headers": [
        "Content-Type",
        "X-Requested-With",
        "Accept",
        "Origin",
    ],
    "max_age": 86400,  # 24 hours
}


def init_cors(app):
    """
    Initialize CORS for the Flask application
    """
    from flask_cors import CORS

    CORS(app,
         resources={r"/*": {"origins": CORS_CONFIG["origins"]}},
         methods=CORS_CONFIG["methods"],
         allow_headers=CORS_CONFIG["allow_headers"],
         max_age=CORS_CONFIG["max_age"])

    app.logger.info("CORS enabled for all origins")
