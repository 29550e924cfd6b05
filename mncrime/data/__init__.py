from .remote import (
    DATA_QUERY_BASE,
    RemoteDataClient,
    build_city_query,
    build_neighborhood_query,
    build_previous_years_query,
    build_query_url,
    normalize_rows,
)

__all__ = [
    "DATA_QUERY_BASE",
    "RemoteDataClient",
    "build_city_query",
    "build_neighborhood_query",
    "build_previous_years_query",
    "build_query_url",
    "normalize_rows",
]
