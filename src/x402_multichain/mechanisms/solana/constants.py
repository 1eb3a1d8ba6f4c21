"""Solana program addresses and transaction defaults"""

SCHEME_EXACT = "exact"

# Token program addresses (same across all Solana networks)
TOKEN_PROGRAM_ADDRESS = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ADDRESS = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ADDRESS = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
COMPUTE_BUDGET_PROGRAM_ADDRESS = "ComputeBudget111111111111111111111111111111"
SYSTEM_PROGRAM_ADDRESS = "11111111111111111111111111111111"

# Compute budget configuration
# All prices are in microlamports (1 lamport = 1,000,000 microlamports)
DEFAULT_COMPUTE_UNIT_LIMIT = 20_000
DEFAULT_COMPUTE_UNIT_PRICE_MICROLAMPORTS = 1

# Instruction discriminators
SET_COMPUTE_UNIT_LIMIT_DISCRIMINATOR = 2
SET_COMPUTE_UNIT_PRICE_DISCRIMINATOR = 3
TRANSFER_CHECKED_DISCRIMINATOR = 12

# SPL Token Mint layout:
#   0-3:   mintAuthorityOption (4 bytes)
#   4-35:  mintAuthority (32 bytes)
#   36-43: supply (8 bytes, u64)
#   44:    decimals (1 byte, u8)
MINT_DECIMALS_OFFSET = 44

MAX_U64 = 2**64 - 1
