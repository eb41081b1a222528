from flask import jsonify, request

from travel_planner.api import api_bp, server_error
from travel_planner.utils.world_cities import DEFAULT_LIMIT, search_world_cities


@api_bp.route("/locations/cities", methods=["GET"])
def search_cities():
    query = request.args.get("q") or ""
    country = request.args.get("country") or ""
    limit = request.args.get("limit") or DEFAULT_LIMIT

    if not query.strip():
        return jsonify({"data": []})
    try:
        data = search_world_cities(query, country=country, limit=limit)
    except Exception:
        return server_error("Cities search failed.", "server error")
    return jsonify({"data": data})
