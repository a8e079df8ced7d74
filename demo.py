"""Canned demo result served when neither a live run nor a stored result exists."""

from models.trend import Provenance, Trend, TrendResult

DEMO_TRENDS = [
    {
        "topic": "AI Agent Frameworks",
        "score": 92,
        "summary": (
            "Open-source frameworks for building AI agents are gaining massive traction, "
            "with developers creating specialized tools for autonomous task completion."
        ),
        "sources": ["GitHub", "Reddit"],
        "examples": [
            "AutoGPT framework reaches 50k+ stars",
            "LangChain agents for complex workflows",
            "BabyAGI-inspired productivity tools",
        ],
    },
    {
        "topic": "Web3 Gaming Infrastructure",
        "score": 87,
        "summary": (
            "Blockchain gaming platforms are evolving with better developer tools, "
            "making it easier to create play-to-earn experiences."
        ),
        "sources": ["Product Hunt", "Hacker News"],
        "examples": [
            "Thirdweb gaming SDK launches",
            "Immutable X for NFT games",
            "Play-to-earn tokenomics platforms",
        ],
    },
    {
        "topic": "Decentralized Social Media",
        "score": 78,
        "summary": (
            "New social platforms built on blockchain technology are emerging, "
            "focusing on user ownership and censorship resistance."
        ),
        "sources": ["Reddit", "GitHub"],
        "examples": [
            "Lens Protocol social dApps",
            "Farcaster decentralized Twitter",
            "Mastodon federation growth",
        ],
    },
    {
        "topic": "Climate Tech SaaS",
        "score": 85,
        "summary": (
            "B2B software solutions for carbon tracking and sustainability management "
            "are becoming essential for enterprise compliance."
        ),
        "sources": ["Product Hunt", "Hacker News"],
        "examples": [
            "Carbon accounting platforms",
            "Supply chain emission tracking",
            "ESG reporting automation tools",
        ],
    },
    {
        "topic": "No-Code AI Tools",
        "score": 73,
        "summary": (
            "User-friendly platforms that let non-technical users build AI applications "
            "without coding knowledge."
        ),
        "sources": ["Product Hunt", "Reddit"],
        "examples": [
            "GPT-powered app builders",
            "Visual AI workflow tools",
            "No-code machine learning platforms",
        ],
    },
]


def demo_result() -> TrendResult:
    """Build a fresh demo TrendResult (provenance ``demo``)."""
    trends = [Trend(**trend) for trend in DEMO_TRENDS]
    return TrendResult.ok(trends, total_items=len(trends), provenance=Provenance.DEMO)
