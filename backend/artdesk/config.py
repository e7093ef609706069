import os
from dotenv import load_dotenv

load_dotenv()

# Backend REST API. One base for every admin resource.
API_URL = (
    os.getenv("API_URL")
    or os.getenv("NEXT_PUBLIC_API_URL")
    or "http://localhost:5000/v1/api"
).rstrip("/")

# Host serving the per-category listing endpoints (/api/galleries, /api/museums, ...)
LISTINGS_BASE_URL = os.getenv("LISTINGS_BASE_URL", "http://localhost:3000").rstrip("/")

ALGOLIA_APP_ID = os.getenv("ALGOLIA_APP_ID")
ALGOLIA_API_KEY = os.getenv("ALGOLIA_API_KEY")
ALGOLIA_INDEX = os.getenv("ALGOLIA_INDEX", "production_all_artworks")

ARTSY_GRAPHQL_URL = os.getenv("ARTSY_GRAPHQL_URL", "https://metaphysics-cdn.artsy.net/v2")

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))
CATEGORY_PAGE_SIZE = int(os.getenv("CATEGORY_PAGE_SIZE", "100"))
ITEMS_PER_PAGE = int(os.getenv("ITEMS_PER_PAGE", "12"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def algolia_query_url(app_id: str = None, index: str = None) -> str:
    app_id = app_id or ALGOLIA_APP_ID
    index = index or ALGOLIA_INDEX
    return f"https://{app_id.lower()}-dsn.algolia.net/1/indexes/{index}/query"
