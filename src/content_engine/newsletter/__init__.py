# Newsletter — Mailchimp campaign for each published article
from .dispatcher import NewsletterDispatcher
from .mailchimp import MailchimpClient, mailchimp_data_center

__all__ = ["MailchimpClient", "NewsletterDispatcher", "mailchimp_data_center"]
