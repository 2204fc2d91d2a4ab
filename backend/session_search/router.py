from fastapi import APIRouter, HTTPException, Request

from session_search.query import collect_terms, describe, parse_query

search_router = APIRouter()


def _max_results(body: dict):
    max_results = body.get('max_results')
    if max_results is None:
        return None
    if not isinstance(max_results, int) or isinstance(max_results, bool) or max_results < 1:
        raise HTTPException(400, "max_results must be a positive integer")
    return max_results


def _query(body: dict) -> str:
    query = body.get('query') or ''
    if not isinstance(query, str):
        raise HTTPException(400, "query must be a string")
    return query


def _required(body: dict, name: str) -> str:
    value = body.get(name)
    if not value or not isinstance(value, str):
        raise HTTPException(400, f"{name} required")
    return value


#################
# POST requests #
#################

@search_router.post("/api/search/session")
async def search_session(request: Request, body: dict):
    """
    Search one session log with a boolean query
    Missing sessions come back as an empty result, never as an error
    """
    project_path = _required(body, 'project_path')
    session_id = _required(body, 'session_id')
    query = _query(body)
    max_results = _max_results(body)

    engine = request.app.state.search_engine
    response = await engine.search_session_async(project_path, session_id, query, max_results)
    return response.to_dict()


@search_router.post("/api/search/subagent")
async def search_subagent(request: Request, body: dict):
    """Search one sub-agent log with a boolean query"""
    project_path = _required(body, 'project_path')
    agent_id = _required(body, 'agent_id')
    query = _query(body)
    max_results = _max_results(body)

    engine = request.app.state.search_engine
    response = await engine.search_subagent_async(project_path, agent_id, query, max_results)
    return response.to_dict()


@search_router.post("/api/search/validate-query")
async def validate_query(body: dict):
    """
    Explain how a query will be parsed without executing it
    """
    expr = parse_query(_query(body))
    if expr is None:
        return {
            'valid': False,
            'terms': [],
            'expression': None,
        }

    return {
        'valid': True,
        'terms': collect_terms(expr),
        'expression': describe(expr),
    }
