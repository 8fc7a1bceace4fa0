from spotinote import create_app
import os

# WSGI entry point
app = create_app(os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    app.run(
        host=app.config.get('HOST', '0.0.0.0'),
        port=int(app.config.get('PORT', 8000)),
        debug=app.debug
    )
