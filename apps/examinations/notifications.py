import logging

from .errors import NotFound
from .models import Notification
from .permissions import Action, authorize, require_authenticated

logger = logging.getLogger(__name__)


def notify(user, title, message, notification_type=Notification.NotificationType.INFO):
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        notification_type=notification_type,
    )
    logger.debug("Notified user %s: %s", user.pk, title)
    return notification


def notify_attempt_completed(attempt):
    """Tell the student their score and the exam creator that a submission arrived."""
    exam = attempt.exam
    notify(
        attempt.student,
        'Exam Completed',
        f"You have completed the exam: {exam.title} with a score of {attempt.score:.2f}%",
        Notification.NotificationType.SUCCESS,
    )
    notify(
        exam.created_by,
        'Exam Submission',
        f"A student has submitted the exam: {exam.title}",
    )


def list_notifications(caller, unread_only=False):
    require_authenticated(caller)
    queryset = Notification.objects.filter(user=caller)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    return queryset


def mark_read(caller, notification_id):
    require_authenticated(caller)
    try:
        notification = Notification.objects.get(pk=notification_id)
    except (Notification.DoesNotExist, ValueError):
        raise NotFound(f"Notification with ID {notification_id} not found")
    authorize(caller, Action.MANAGE_NOTIFICATION, notification)

    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])
    return notification
