"""
PDF and QR helpers used to stamp tracking codes onto campaign flyers.
"""
