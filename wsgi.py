"""WSGI entry point for Gunicorn."""
from shop import create_app

# Create the application instance
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config['PORT'])
