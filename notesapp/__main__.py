"""python -m notesapp : serveur de dev (en prod, passer par un serveur WSGI)."""
import logging
import sys

from notesapp import create_app
from notesapp.config import ConfigError


def main():
    try:
        app = create_app()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger("notesapp").error(str(e), extra={"missing": e.missing})
        logging.getLogger("notesapp").error("Make sure your .env file has all required fields")
        sys.exit(1)
    app.run(host="0.0.0.0", port=app.config["PORT"])


if __name__ == "__main__":
    main()
