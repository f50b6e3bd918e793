"""
Per-language prompt material.

Each profile carries the language's display name, a few sentiment-labelled
example phrases and a few topic-mapping examples, all in that language so
small models see the vocabulary they are about to classify.
"""

from dataclasses import dataclass

from nps_insights.models.enums import LanguageEnum, TopicsEnum


@dataclass(frozen=True)
class LanguageProfile:
    code: LanguageEnum
    name: str
    positive_examples: tuple[str, ...]
    negative_examples: tuple[str, ...]
    neutral_examples: tuple[str, ...]
    topic_examples: tuple[tuple[str, tuple[tuple[TopicsEnum, float], ...]], ...]


_PROFILES: dict[LanguageEnum, LanguageProfile] = {
    LanguageEnum.EN: LanguageProfile(
        code=LanguageEnum.EN,
        name="English",
        positive_examples=("Easy to use", "Fast transfers", "Great service"),
        negative_examples=("High fees", "App crashes", "Poor support", "Too expensive"),
        neutral_examples=("Works fine", "Average", "Could be better"),
        topic_examples=(
            ("App crashes often", ((TopicsEnum.APP_PERFORMANCE, 0.9),)),
            ("High transfer fees", ((TopicsEnum.TRADING_FEES, 0.9), (TopicsEnum.PAYMENTS, 0.7))),
            ("Quick account opening", ((TopicsEnum.ONBOARDING, 0.9),)),
            ("Support doesn't respond", ((TopicsEnum.CUSTOMER_SUPPORT, 0.9),)),
        ),
    ),
    LanguageEnum.DE: LanguageProfile(
        code=LanguageEnum.DE,
        name="German",
        positive_examples=("Einfach zu bedienen", "Schnelle Überweisungen", "Guter Service"),
        negative_examples=("Hohe Gebühren", "App stürzt ab", "Schlechter Support", "Zu teuer"),
        neutral_examples=("Funktioniert", "Durchschnittlich", "Könnte besser sein"),
        topic_examples=(
            ("App stürzt oft ab", ((TopicsEnum.APP_PERFORMANCE, 0.9),)),
            ("Hohe Überweisungsgebühren", ((TopicsEnum.TRADING_FEES, 0.9), (TopicsEnum.PAYMENTS, 0.7))),
            ("Schnelle Kontoeröffnung", ((TopicsEnum.ONBOARDING, 0.9),)),
            ("Support antwortet nicht", ((TopicsEnum.CUSTOMER_SUPPORT, 0.9),)),
        ),
    ),
    LanguageEnum.FR: LanguageProfile(
        code=LanguageEnum.FR,
        name="French",
        positive_examples=("Facile à utiliser", "Transferts rapides", "Bon service"),
        negative_examples=("Frais élevés", "L'app plante", "Mauvais support", "Trop cher"),
        neutral_examples=("Ça marche", "Moyen", "Pourrait être mieux"),
        topic_examples=(
            ("L'app plante souvent", ((TopicsEnum.APP_PERFORMANCE, 0.9),)),
            ("Frais de virement élevés", ((TopicsEnum.TRADING_FEES, 0.9), (TopicsEnum.PAYMENTS, 0.7))),
            ("Ouverture de compte rapide", ((TopicsEnum.ONBOARDING, 0.9),)),
            ("Le support ne répond pas", ((TopicsEnum.CUSTOMER_SUPPORT, 0.9),)),
        ),
    ),
    LanguageEnum.IT: LanguageProfile(
        code=LanguageEnum.IT,
        name="Italian",
        positive_examples=("Facile da usare", "Trasferimenti veloci", "Buon servizio"),
        negative_examples=("Commissioni alte", "App si blocca", "Supporto scarso", "Troppo caro"),
        neutral_examples=("Funziona", "Nella media", "Potrebbe essere meglio"),
        topic_examples=(
            ("L'app si blocca spesso", ((TopicsEnum.APP_PERFORMANCE, 0.9),)),
            ("Commissioni di trasferimento alte", ((TopicsEnum.TRADING_FEES, 0.9), (TopicsEnum.PAYMENTS, 0.7))),
            ("Apertura conto veloce", ((TopicsEnum.ONBOARDING, 0.9),)),
            ("Il supporto non risponde", ((TopicsEnum.CUSTOMER_SUPPORT, 0.9),)),
        ),
    ),
}


def get_language_profile(language: str | LanguageEnum | None) -> LanguageProfile:
    """Profile for ``language``; unknown codes get the English profile."""
    return _PROFILES[LanguageEnum.normalize(language)]
