from adapters.web.handlers import auth, profile, world, relationships, notifications, admin

# Order matters only for overlapping patterns; none overlap across modules
routes = [
    auth.routes,
    profile.routes,
    world.routes,
    relationships.routes,
    notifications.routes,
    admin.routes,
]
