import os
from dotenv import load_dotenv

# Load environment variables from .flaskenv before the app reads its config
load_dotenv('.flaskenv')

from app import app


def get_debug_mode():
    """Debug only when FLASK_DEBUG is explicitly switched on."""
    return os.environ.get('FLASK_DEBUG', '0').lower() in ('1', 'true', 'yes')


if __name__ == "__main__":
    port = int(os.environ.get('FLASK_RUN_PORT', 5060))

    # Bind to localhost only; reach the service through the gateway
    app.run(
        port=port,
        host='127.0.0.1',
        threaded=True,
        debug=get_debug_mode()
    )
