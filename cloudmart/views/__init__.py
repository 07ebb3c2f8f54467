from cloudmart.views import admin, auth, cart, main, products


def register_blueprints(app):
    for module in (main, auth, products, cart, admin):
        app.register_blueprint(module.bp)
