"""Account records and the registration handler."""
