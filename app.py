import os

from cloudmart import create_app

app = create_app()


if __name__ == "__main__":
    # `flask --app app run` honours FLASK_DEBUG; running this file directly uses PORT/FLASK_DEBUG from the environment
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3000")),
        debug=app.config.get("DEBUG", False),
    )
