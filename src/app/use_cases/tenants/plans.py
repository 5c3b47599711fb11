"""Subscription plan table

Signup credits and feature limits per plan. A credits value of None
means an unlimited balance for the duration of the trial.
"""

PLANS = {
    "free": {
        "credits": 10000,
        "tier": "free",
        "trial": False,
        "limits": {
            "max_products": 100,
            "max_users": 2,
            "max_locations": 1,
            "max_menus": 1,
            "api_access": False,
        },
    },
    "starter": {
        "credits": 25000,
        "tier": "paid",
        "trial": False,
        "limits": {
            "max_products": 1000,
            "max_users": 5,
            "max_locations": 2,
            "max_menus": 5,
            "api_access": False,
        },
    },
    "professional": {
        "credits": 100000,
        "tier": "paid",
        "trial": False,
        "limits": {
            "max_products": 10000,
            "max_users": 25,
            "max_locations": 10,
            "max_menus": 50,
            "api_access": True,
        },
    },
    "enterprise": {
        "credits": 500000,
        "tier": "paid",
        "trial": False,
        "limits": {
            "max_products": None,
            "max_users": None,
            "max_locations": None,
            "max_menus": None,
            "api_access": True,
        },
    },
    "trial": {
        "credits": None,
        "tier": "free",
        "trial": True,
        "limits": {
            "max_products": 1000,
            "max_users": 5,
            "max_locations": 2,
            "max_menus": 5,
            "api_access": True,
        },
    },
}


def get_plan(name: str):
    return PLANS.get(name)
