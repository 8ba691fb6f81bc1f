from financial_system.domain.monetary.currency import Currency, CurrencyType


# Fiat currencies
USD = Currency("USD", 2, "US Dollar", CurrencyType.FIAT)
EUR = Currency("EUR", 2, "Euro", CurrencyType.FIAT)
GBP = Currency("GBP", 2, "British Pound", CurrencyType.FIAT)
BRL = Currency("BRL", 2, "Brazilian Real", CurrencyType.FIAT)
CHF = Currency("CHF", 2, "Swiss Franc", CurrencyType.FIAT)
JPY = Currency("JPY", 0, "Japanese Yen", CurrencyType.FIAT)

# Crypto currencies
BTC = Currency("BTC", 8, "Bitcoin", CurrencyType.CRYPTO)
ETH = Currency("ETH", 18, "Ethereum", CurrencyType.CRYPTO)

# Commodities
XAU = Currency("XAU", 4, "Gold", CurrencyType.COMMODITY)

# Register all predefined currencies
for _currency in (USD, EUR, GBP, BRL, CHF, JPY, BTC, ETH, XAU):
    Currency.register(_currency, overwrite=True)
