"""Development entry point: ``python app.py`` or ``flask --app app run``."""

from src.visitor_system.visitor_system.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config["DEBUG"])
