"""
Error taxonomy shared by the services and the HTTP layer.

Each error carries a client-safe ``message`` and the status code the API
answers with; the mapping to responses lives in ``interfaces.api.errors``.
"""


class DomainError(Exception):
    status_code = 500
    default_message = "Erro interno do servidor"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Dados inválidos"


class AuthenticationError(DomainError):
    status_code = 401
    default_message = "Não autenticado"


class AuthorizationError(DomainError):
    status_code = 403
    default_message = "Acesso negado"


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Recurso não encontrado"


UNIQUE_FIELD_MESSAGES = {
    "email": "Email já está em uso",
    "username": "Nome de usuário já está em uso",
    "cpf": "CPF já cadastrado",
    "phone_number": "Número de telefone já está em uso",
    "pro_registration": "Registro profissional já está em uso",
    "user_id": "Usuário já possui perfil profissional",
}


class ConflictError(DomainError):
    status_code = 409
    default_message = "Registro já existe"

    @classmethod
    def for_field(cls, field: str) -> "ConflictError":
        return cls(UNIQUE_FIELD_MESSAGES.get(field))


class InternalError(DomainError):
    status_code = 500
