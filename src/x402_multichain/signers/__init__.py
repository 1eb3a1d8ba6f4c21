"""
x402 Signers
"""
