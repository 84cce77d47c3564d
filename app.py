"""Run the attendance server: `python app.py` (APP_ENV picks the settings module)."""

from src.class_attendance.class_attendance import create_app, get_container

app = create_app()


if __name__ == "__main__":
    settings = get_container(app).settings
    # Reloader would start a second copy of the background scheduler
    app.run(host="0.0.0.0", port=settings.port, debug=settings.debug, use_reloader=False)
