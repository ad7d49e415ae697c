"""
Contact (friend) lists.
"""

from src.kernel.contacts.contact_service import ContactService

__all__ = ["ContactService"]
