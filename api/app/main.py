"""FastAPI app with Strawberry GraphQL."""

from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter

from app.schema import API_VERSION, schema
from bonding.config import configure_logging

configure_logging()

app = FastAPI(title="Bonding API", version=API_VERSION)
graphql_app = GraphQLRouter(schema)
app.include_router(graphql_app, prefix="/graphql")


@app.get("/health")
def health() -> dict[str, str]:
    """Health check for load balancers and Docker."""
    return {"status": "ok"}
