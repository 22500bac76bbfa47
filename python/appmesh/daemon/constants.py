"""
Fixed names and values used by the App Mesh REST layer.  These are shared with the other
App Mesh components (and clients) and, thus, should not be changed.
"""

HTTP_HEADER_JWT_AUTHORIZATION = "Authorization"
HTTP_HEADER_JWT_BEARER_SPACE = "Bearer "
HTTP_HEADER_JWT = "JWT"
HTTP_HEADER_JWT_ISSUER = "appmesh-auth0"
HTTP_HEADER_JWT_NAME = "name"
JWT_ALGORITHM = "HS256"

# file download/upload endpoints are always served locally
REST_FILE_PATH_PREFIX = "/appmesh/file"

REST_ROOT_TEXT = "App Mesh"
REST_PATH_NOT_FOUND = "Path not found"
REST_UNKNOWN_EXCEPTION = "unknown exception"

HTTP_GET = "GET"
HTTP_PUT = "PUT"
HTTP_POST = "POST"
HTTP_DELETE = "DELETE"
HTTP_OPTIONS = "OPTIONS"

DEF_TOKEN_TTL = 7 * 24 * 3600
