"""CareerDesk: career profile, mailbox job extraction and tailored application documents."""

__version__ = "0.3.0"
