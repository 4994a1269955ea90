# Services package.
#
#   article_service  — list/show/create/update/delete for Article
#   auth_service     — sign-up, sign-in, sign-out and token refresh for User
#
# Every service function takes an AsyncSession first so the router layer
# owns the transaction boundary via ``get_db``.  Owner-bound operations
# also take the authenticated User explicitly.
