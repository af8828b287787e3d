"""Global variables."""

OPENAPI_TAGS = [
    {
        "name": "Grocery Items",
        "description": (
            "CRUD operations for grocery items, expiry views"
            " and label scanning"
        ),
    },
    {
        "name": "Recipes",
        "description": "Recipe search, suggestions and nutrition estimates",
    },
    {
        "name": "Health",
        "description": (
            "Health metrics, HbA1c tracking, risk annotation and health "
            "checks"
        ),
    },
    {
        "name": "Notifications",
        "description": "Real-time item change stream over WebSocket",
    },
]
