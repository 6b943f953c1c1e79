#setup: pip install -e ".[test]"
#setup: flask --app interest_engine.wsgi run --port 5000 --debug

from interest_engine.app import create_app

app = create_app()


if __name__ == "__main__":
    app.run(port=5000, debug=True)
