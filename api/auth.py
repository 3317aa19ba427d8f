"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/signout
- GET  /auth/google
- GET  /auth/google-redirect

Routes only parse input and shape output; the session lifecycle lives in
services.auth_flow.AuthFlowController (app.extensions["auth_flow"]).
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app, redirect

from models.schemas.auth import AuthOutSchema, RefreshSchema, TokenPairOutSchema, issued_to_dict
from models.schemas.user import RegisterSchema, LoginSchema
from services.auth_flow import AuthFlowController
from utils.decorators import jwt_required, bearer_token

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
auth_out_schema = AuthOutSchema()
token_pair_out_schema = TokenPairOutSchema()


def auth_flow() -> AuthFlowController:
    return current_app.extensions["auth_flow"]


@bp.post("/register")
def register():
    """
    Register a new user and open their first session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string }
            name: { type: string }
            birthday: { type: string, format: date }
            originUrl: { type: string }
            avatarUrl: { type: string }
    responses:
      201:
        description: Created (returns tokens, session id and profile)
      409:
        description: Email in use
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)

    issued = auth_flow().register(
        data["email"],
        data["password"],
        name=data.get("name"),
        birthday=data.get("birthday"),
        origin_url=data.get("origin_url"),
        avatar_url=data.get("avatar_url"),
    )
    return jsonify(auth_out_schema.dump(issued_to_dict(issued))), 201


@bp.post("/login")
def login():
    """
    Login: return access and refresh tokens bound to a new session
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens, session id and profile)
      401:
        description: Email or password is wrong
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    issued = auth_flow().login(data["email"], data["password"])
    return jsonify(auth_out_schema.dump(issued_to_dict(issued))), 200


@bp.post("/refresh")
def refresh():
    """
    Rotate the session: trade a refresh token for a new pair (single use)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             sessionId: { type: string }
    responses:
      200:
        description: OK (returns new tokens and session id)
      400:
        description: No token provided
      401:
        description: Refresh token rejected; the session is revoked
      404:
        description: Invalid session or user
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)

    issued = auth_flow().refresh(data.get("session_id"), bearer_token())
    return jsonify(token_pair_out_schema.dump(issued_to_dict(issued, with_user=False))), 200


@bp.post("/signout")
@jwt_required()
def signout():
    """
    Signout: revoke the current session
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: ""
      401:
        description: Unauthorized
    """
    auth_flow().signout(g.current_user.id, g.current_session.id)
    return ("", 204)


@bp.get("/google")
def google_auth():
    """
    Start Google sign-in (redirects to the consent screen)
    ---
    tags:
      - Auth
    responses:
      302:
        description: Redirect to Google
    """
    return redirect(auth_flow().authorization_url(request.args.get("state")), code=302)


@bp.get("/google-redirect")
def google_redirect():
    """
    Google callback: sign in an already registered user
    ---
    tags:
      - Auth
    parameters:
      -  in: query
         name: code
         type: string
         required: true
    responses:
      302:
        description: Redirect to the user's origin with tokens as query parameters
      400:
        description: Missing authorization code
      403:
        description: No account registered through the application
      502:
        description: Google request failed
    """
    issued = auth_flow().federated_sign_in(request.args.get("code"))
    return redirect(issued.redirect_url, code=302)
