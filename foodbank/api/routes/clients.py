from fastapi import APIRouter

from foodbank.logic.search.relevance import relevance_score, search_clients
from foodbank.utilities.validators import ClientSearchInput

router = APIRouter(prefix="/api/clients")


@router.post("/search")
def search(payload: ClientSearchInput):
    """Ranked matches for a query, or letter groups when the query is empty."""
    result = search_clients(payload.clients, payload.query)
    if not result.query_tokens:
        return {
            "mode": "grouped",
            "letters": result.letters,
            "groups": [
                {"letter": letter, "clients": [c.to_dict() for c in items]}
                for letter, items in result.groups
            ],
        }
    return {
        "mode": "ranked",
        "tokens": result.query_tokens,
        "clients": [
            {**c.to_dict(), "score": round(relevance_score(c, result.query_tokens), 5)}
            for c in result.ranked
        ],
        "count": len(result.ranked),
    }
