from dataclasses import dataclass, field
from typing import Any

from django.http import HttpRequest, HttpResponse
from strawberry.django.views import GraphQLView

from ..attempt_service import ExamAttemptService
from ..authentication import resolve_caller


@dataclass
class ExamContext:
    request: HttpRequest
    response: HttpResponse
    caller: Any
    attempts: ExamAttemptService = field(default_factory=ExamAttemptService)


class ExamGraphQLView(GraphQLView):
    """GraphQL endpoint that resolves the bearer token once per request."""

    def get_context(self, request, response):
        return ExamContext(
            request=request,
            response=response,
            caller=resolve_caller(request),
        )
