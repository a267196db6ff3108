from flet_local_notifications.flet_local_notifications import FletLocalNotifications

__all__ = ["FletLocalNotifications"]
