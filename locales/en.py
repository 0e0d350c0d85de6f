"""English strings for the web pages."""

EN_STRINGS = {
    # === LANDING ===
    "site_name": "PLAYR",
    "landing_title": "Where field hockey connects",
    "landing_tagline": "Players, coaches, clubs and brands in one network.",
    "sign_in": "Sign In",
    "sign_in_button": "Sign in",
    "sign_in_google": "Continue with Google",
    "forgot_password": "Forgot password?",
    "create_account": "Create account",
    "new_here": "New here?",
    "join_playr": "Join PLAYR",

    # === SIGNUP ===
    "signup_choose_role": "Choose how you want to join",
    "join_as_player": "Join as Player",
    "join_as_coach": "Join as Coach",
    "join_as_club": "Join as Club",
    "join_as_brand": "Join as Brand",
    "join_as_player_desc": "Showcase your journey and get discovered",
    "join_as_coach_desc": "Share your experience and find your next role",
    "join_as_club_desc": "Claim your club and connect with talent",
    "join_as_brand_desc": "Reach the hockey community",
    "email_placeholder": "Enter your email",
    "password_placeholder": "Create a password (min. 8 characters)",
    "signup_submit": "Create account",
    "change_role": "Change role",
    "have_account": "Already have an account? Sign in",

    # === VERIFY EMAIL ===
    "verify_title": "Check your email",
    "verify_sent": "We've sent a verification link to {email}",
    "verify_unverified": "Please verify your email before signing in. We've sent a verification link to {email}",
    "verify_resend": "Resend verification email",
    "verify_resent": "Verification email sent again.",

    # === PROFILE ===
    "complete_profile_title": "Complete your profile",
    "dashboard_title": "Dashboard",
    "tab_profile": "Profile",
    "tab_journey": "Journey",
    "tab_friends": "Friends",
    "tab_references": "References",
    "tab_overview": "Overview",
    "edit_profile": "Edit profile",
    "profile_strength": "Profile strength",

    # === WORLD ===
    "world_title": "World",
    "world_search_placeholder": "Search countries or clubs",
    "world_regions": "Regions",
    "world_leagues": "Leagues",
    "world_clubs": "Clubs",
    "world_no_clubs": "No clubs listed yet.",
    "world_women": "Women",
    "world_men": "Men",

    # === ADMIN ===
    "admin_title": "PLAYR Admin",
    "admin_overview": "Overview",
    "admin_not_allowed": "You do not have access to the admin portal.",
    "admin_data_issues": "Data Issues",

    # === ERRORS ===
    "not_found": "Page not found",
    "sign_in_required": "Please sign in to continue.",
    "too_many_requests": "You're sending too many requests. Please wait a moment.",
    "backend_error": "Something went wrong. Please try again.",
}
