"""
Courthouse posts module.

- Posts are listed to every signed-in user, newest first
- Create/update/delete require ManageCourthousePosts or an elevated rank
- The whole module is hidden when the COURTHOUSE feature is disabled
"""
