# module solucenter.app
from solucenter.app_setup.factory import create_app

# App globale
app = create_app()
