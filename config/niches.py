"""
Niche Lists for the Niche Growth Dashboard

This module contains the fixed niche vocabulary offered during onboarding and
the mapping from niche names to the statistics API's category tags.
Extracted from settings.py to separate data from configuration logic.
"""

NICHES = [
    "Fitness & Health",
    "Cooking & Food",
    "Tech Reviews",
    "Fashion & Style",
    "Beauty & Skincare",
    "Travel",
    "Personal Finance",
    "Gaming",
    "Photography",
    "Lifestyle",
    "Education",
    "Comedy & Entertainment",
    "Music",
    "Art & Design",
    "Parenting",
    "Pets & Animals",
    "Sports",
    "DIY & Crafts",
    "Business & Entrepreneurship",
    "Motivation & Self-Help",
]

# Statistics API tag slugs; niches not listed here are slugified instead
NICHE_TAG_MAP = {
    "Fitness & Health": "fitness",
    "Cooking & Food": "food-and-cooking",
    "Tech Reviews": "technology-and-science",
    "Fashion & Style": "fashion",
    "Beauty & Skincare": "beauty",
    "Travel": "travel",
    "Personal Finance": "finance-and-economics",
    "Gaming": "gaming",
    "Photography": "photography",
    "Lifestyle": "lifestyle",
    "Education": "education",
    "Comedy & Entertainment": "humor-and-fun-and-happiness",
    "Music": "music",
    "Art & Design": "art-and-artists",
    "Parenting": "family",
    "Pets & Animals": "animals",
    "Sports": "sports-with-a-ball",
    "DIY & Crafts": "diy-and-design",
    "Business & Entrepreneurship": "business-and-careers",
    "Motivation & Self-Help": "shows",
}

# =============================================================================
# Fixture Creator Names
# =============================================================================

MOCK_CREATOR_NAMES = {
    "instagram": [
        "fitness_guru", "healthy_habits", "workout_daily", "mindful_moves", "strength_lab",
        "clean_eats", "yoga_flow", "run_wild", "lift_heavy", "wellness_warrior",
    ],
    "tiktok": [
        "trending_tips", "viral_vibes", "content_king", "niche_master", "growth_hacker",
        "daily_inspo", "creator_life", "trend_setter", "viral_coach", "social_spark",
    ],
}

MOCK_CREATOR_BIOS = {
    "instagram": "{niche} content creator | Sharing tips & inspiration",
    "tiktok": "{niche} creator | Going viral one video at a time",
}

MOCK_POST_CAPTIONS = {
    "instagram": [
        "5 things I wish I knew when starting out! Which one surprises you the most? Drop a comment below",
        "This changed everything for me. Here's the exact process I follow every single day",
        "POV: You finally figure out what works. Save this for later!",
        "Stop doing this ONE thing and watch your results transform. Swipe to see the difference",
        "Behind the scenes of my morning routine. It's not what you think...",
        "The algorithm doesn't want you to see this. Share before it gets taken down!",
        "I asked 100 people what their biggest struggle is. Here's what they said",
        "Unpopular opinion: most advice in this space is completely wrong. Here's why",
    ],
    "tiktok": [
        "Wait for it... this hack changed my life! #fyp #viral",
        "I can't believe this actually works. Try it yourself! #lifehack",
        "Replying to @user here's exactly how I did it step by step",
        "Day 30 of posting until I go viral. Today's the day?",
        "POV: when you finally crack the code. Stitch this!",
        "3 secrets nobody tells you about this. Number 2 is wild",
        "Tell me you're into this without telling me. I'll go first",
        "This trend but make it educational. You're welcome!",
    ],
}
