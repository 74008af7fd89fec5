CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "create_character",
    "train_character",
    "list_character",
    "purchase_character",
)

QUERY_INTENTS = (
    "get_character",
    "get_market_listings",
)

ERROR_CODES = (
    "invalid_input",
    "not_found",
    "unauthorized",
    "cooldown_active",
    "listing_not_active",
)

CONTRACT_DTO_TYPES = (
    "CreateCharacterPayload",
    "TrainCharacterPayload",
    "ListCharacterPayload",
    "PurchaseCharacterPayload",
    "OperationResult",
)
