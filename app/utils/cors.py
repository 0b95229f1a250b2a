"""
CORS Configuration
The web client calls the report API from its own origin
"""

CORS_CONFIG = {
    "methods": ["GET", "POST", "OPTIONS"],
    "allow_headers": [
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Accept",
        "Origin",
    ],
    "expose_headers": [
        "Content-Type",
        "Content-Disposition",
    ],
    "max_age": 86400,  # 24 hours
}


def init_cors(app):
    """
    Initialize CORS for the API blueprints; storage URLs are opened directly
    """
    from flask_cors import CORS

    origins = app.config.get('CORS_ORIGINS') or []
    CORS(app,
         resources={r"/api/*": {"origins": origins}},
         methods=CORS_CONFIG["methods"],
         allow_headers=CORS_CONFIG["allow_headers"],
         expose_headers=CORS_CONFIG["expose_headers"],
         max_age=CORS_CONFIG["max_age"])

    app.logger.info(f"CORS enabled for {', '.join(origins) or 'no origins'}")
