"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) modifie le schéma généré par FastAPI pour :

ajouter un titre, une description détaillée,

documenter les conventions communes (erreurs, identifiants, fichiers).

🔹 Avantages :

La doc est toujours complète et cohérente.
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API de revue vidéo : projets, dossiers, vidéos, versions et commentaires horodatés.\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Les identifiants sont des UUID (chaînes).\n"
            "- Erreurs : corps JSON `{\"error\": ..., \"details\": ...}`.\n"
            "- Les fichiers uploadés sont servis sous `/videos/<file_path>` avec support de `Range`.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
