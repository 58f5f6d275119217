# backend/pokemon_manager/exceptions.py


class PokemonManagerError(Exception):
    """Base class for errors that are rendered as JSON error responses."""

    status_code: int = 500
    message_field: str = "msg"

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UpstreamFetchError(PokemonManagerError):
    """PokeAPI was unreachable or answered with a non-2xx status."""

    status_code = 500

    def __init__(self, url: str, status: int = None):
        super().__init__("Failed to fetch Pokémon data")
        self.url = url
        self.status = status

    def __str__(self):
        suffix = f" (status {self.status})" if self.status is not None else ""
        return f"Failed to fetch data from {self.url}{suffix}"


class AuthError(PokemonManagerError):
    status_code = 403
    message_field = "errorMsg"


class NotFoundError(PokemonManagerError):
    status_code = 404


class FavoriteWriteError(PokemonManagerError):
    status_code = 500


class UserAlreadyExistsError(PokemonManagerError):
    status_code = 400


class InvalidCredentialsError(PokemonManagerError):
    status_code = 400
