from app.cad import create_app

app = create_app()
