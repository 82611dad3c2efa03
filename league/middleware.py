# middleware.py
import logging

from django.http import JsonResponse

from league.exceptions import Conflict, LeagueError

logger = logging.getLogger(__name__)


class LeagueErrorMiddleware:
    """
    Turns engine errors raised by a view into JSON the score-entry client can
    show, instead of a 500 page.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not isinstance(exception, LeagueError):
            return None

        logger.info("%s %s -> %s: %s", request.method, request.path,
                    type(exception).__name__, exception)
        response = JsonResponse(
            {'success': False, 'error': str(exception), 'code': type(exception).__name__},
            status=exception.status_code,
        )
        if isinstance(exception, Conflict):
            response['Retry-After'] = '1'
        return response
