import logging
import os
import jwt

from common.utils.constants import LOG_LEVEL

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable is not set")

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)


def _generate_policy(principal_id, effect, resource, context=None):
    auth_response = {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "execute-api:Invoke",
                    "Effect": effect,
                    "Resource": resource,
                }
            ],
        },
    }

    # API Gateway only passes string values through the authorizer context
    if context:
        auth_response["context"] = {
            k: str(v) for k, v in context.items()
        }

    return auth_response


def _get_stage_arn(method_arn: str) -> str:
    parts = method_arn.split("/")
    return "/".join(parts[:2]) + "/*/*"


def _bearer_token(headers: dict) -> str:
    token = headers.get("Authorization") or headers.get("authorization")
    if not token:
        raise ValueError("Missing Authorization header")
    if token.startswith("Bearer "):
        token = token[len("Bearer "):]
    return token.strip()


def lambda_handler(event, context):
    resource = _get_stage_arn(event["methodArn"])
    try:
        token = _bearer_token(event.get("headers") or {})

        decoded = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp"]},
        )

        user_id = decoded.get("user_id") or decoded.get("id")
        if not user_id:
            raise ValueError("Missing user_id in token")

        return _generate_policy(
            principal_id=user_id,
            effect="Allow",
            resource=resource,
            context={
                "user_id": user_id,
                "email": decoded.get("email", ""),
                "name": decoded.get("name", ""),
                "role": decoded.get("role", "CUSTOMER"),
            },
        )

    except jwt.ExpiredSignatureError:
        logger.warning("Authorization failed: token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Authorization failed: invalid token ({e})")
    except Exception as e:
        logger.warning(f"Authorization failed: {e}")

    return _generate_policy(
        principal_id="unauthorized",
        effect="Deny",
        resource=resource,
    )
