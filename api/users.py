from __future__ import annotations

from flask import Blueprint, jsonify, g

from models.schemas.user import UserPublicSchema
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_public_schema = UserPublicSchema()


@bp.get("/users/current")
@jwt_required()
def current():
    """
    Get the signed-in user's profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "user": user_public_schema.dump(g.current_user),
            "sessionId": g.current_session.id,
        }
    ), 200
