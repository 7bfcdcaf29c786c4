"""
ANGAGU Backend — Application Error Codes
=========================================

What:  The stable `errCode` → message table shared by every handler.
How:   `ErrCode` names each code; `ERROR_MESSAGES` is a read-only mapping
       built once at import time. Clients key on the integer, never on the
       message text.

Code ranges:
    0        unknown / internal
    100-199  input and database failures
    200-299  principal / authorization failures
    300-399  resource-specific failures
    400-499  phone verification and credential failures
    500-599  request-content and ownership failures
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping


class ErrCode(IntEnum):
    UNKNOWN = 0

    DATABASE = 100
    INVALID_EMAIL = 101
    ACCOUNT_NOT_FOUND = 102
    INVALID_PASSWORD = 103
    INVALID_PHONE = 104

    WRONG_PRINCIPAL = 200
    UNAUTHORIZED = 201

    PRODUCT_NOT_FOUND = 300
    ADDRESS_POST_FAILED = 301
    ADDRESS_DEFAULT_FAILED = 302
    ADDRESS_DELETE_FAILED = 303
    ADDRESS_PUT_FAILED = 304
    ORDER_POST_FAILED = 305
    DUPLICATE_ACCOUNT = 306
    SIGNUP_FAILED = 307
    REVIEW_POST_FAILED = 308
    REVIEW_PUT_FAILED = 309
    REVIEW_DELETE_FAILED = 310
    BOARD_POST_FAILED = 311
    PRODUCT_POST_FAILED = 312
    PRODUCT_DELETE_FAILED = 313
    DELIVERY_NUMBER_FAILED = 314
    REFUND_FAILED = 315
    BUSINESS_INFO_FAILED = 316
    BOARD_ANSWER_FAILED = 317
    APPROVE_FAILED = 318
    PASSWORD_RESET_FAILED = 319

    WRONG_VERIFY_CODE = 400
    VERIFY_FAILED = 401
    DUPLICATE_EMAIL = 402
    SEND_CODE_FAILED = 403
    INVALID_VERIFICATION_TOKEN = 404
    WRONG_PASSWORD = 405

    INVALID_ADDRESS = 501
    NOT_OWNER = 502
    AMBIGUOUS_RESOURCE = 503
    INVALID_CONTENT = 504
    INVALID_ORDER = 505


ERROR_MESSAGES: Mapping[int, str] = MappingProxyType({
    ErrCode.UNKNOWN: "An unknown error occurred.",
    ErrCode.DATABASE: "A database error occurred.",
    ErrCode.INVALID_EMAIL: "The email address is not valid.",
    ErrCode.ACCOUNT_NOT_FOUND: "No account matches, or more than one account matches.",
    ErrCode.INVALID_PASSWORD: (
        "The password must be 8-16 characters and contain a letter, "
        "a digit and a special character."
    ),
    ErrCode.INVALID_PHONE: "The phone number is not valid.",
    ErrCode.WRONG_PRINCIPAL: "This account type is not allowed to use this resource.",
    ErrCode.UNAUTHORIZED: "The access token is missing or invalid.",
    ErrCode.PRODUCT_NOT_FOUND: "The product does not exist.",
    ErrCode.ADDRESS_POST_FAILED: "Failed to register the address.",
    ErrCode.ADDRESS_DEFAULT_FAILED: "Failed to set the default address.",
    ErrCode.ADDRESS_DELETE_FAILED: "Failed to delete the address.",
    ErrCode.ADDRESS_PUT_FAILED: "Failed to update the address.",
    ErrCode.ORDER_POST_FAILED: "Failed to place the order.",
    ErrCode.DUPLICATE_ACCOUNT: "An account with this email or phone number already exists.",
    ErrCode.SIGNUP_FAILED: "Failed to sign up.",
    ErrCode.REVIEW_POST_FAILED: "Failed to register the review.",
    ErrCode.REVIEW_PUT_FAILED: "Failed to update the review.",
    ErrCode.REVIEW_DELETE_FAILED: "Failed to delete the review.",
    ErrCode.BOARD_POST_FAILED: "Failed to register the board post.",
    ErrCode.PRODUCT_POST_FAILED: "Failed to register the product.",
    ErrCode.PRODUCT_DELETE_FAILED: "Failed to delete the product.",
    ErrCode.DELIVERY_NUMBER_FAILED: "Failed to register the delivery number.",
    ErrCode.REFUND_FAILED: "Failed to process the refund.",
    ErrCode.BUSINESS_INFO_FAILED: "Failed to update the business information.",
    ErrCode.BOARD_ANSWER_FAILED: "Failed to answer the board post.",
    ErrCode.APPROVE_FAILED: "Failed to approve the product.",
    ErrCode.PASSWORD_RESET_FAILED: "Failed to reset the password.",
    ErrCode.WRONG_VERIFY_CODE: "The verification code is wrong.",
    ErrCode.VERIFY_FAILED: "Phone verification failed. Request a new code.",
    ErrCode.DUPLICATE_EMAIL: "The email address is already in use.",
    ErrCode.SEND_CODE_FAILED: "Failed to send the verification code.",
    ErrCode.INVALID_VERIFICATION_TOKEN: "The phone verification is missing or has expired.",
    ErrCode.WRONG_PASSWORD: "The password is wrong.",
    ErrCode.INVALID_ADDRESS: (
        "Exactly one of road or land address is required, together with "
        "recipient and detail."
    ),
    ErrCode.NOT_OWNER: "The resource does not belong to this account.",
    ErrCode.AMBIGUOUS_RESOURCE: "The resource does not exist or is ambiguous.",
    ErrCode.INVALID_CONTENT: "The request content is missing or invalid.",
    ErrCode.INVALID_ORDER: "The order must contain at least one item with a positive count.",
})


def message_for(code: int) -> str:
    """Message for `code`; unknown codes fall back to the code-0 message."""
    return ERROR_MESSAGES.get(code, ERROR_MESSAGES[ErrCode.UNKNOWN])
