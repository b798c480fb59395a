# main.py
import logging
import time

from analytics import SessionAnalytics
from commands import CommandRouter
from config_manager import get_distraction_sites
from database import SharedStateStore
from tracker import ForestTracker

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


def display_forest(router):
    """Display the forest and session statistics."""
    forest = router.handle({'action': 'getForestData'})['data']
    print(f"\nForest: {len(forest['trees'])} trees")
    for tree in forest['trees'][-5:]:  # Show last 5 trees
        intensity = tree['burn_intensity']
        burn = f", burn {intensity:.2f}" if intensity is not None else ""
        print(f"  {tree['id']} - {tree['status']} (height {tree['height']:.0f}, stage {tree['growth_stage']}{burn})")

    wildfire = forest['wildfire']
    if wildfire['active']:
        print(f"  Wildfire! level {wildfire['level']:.2f}, {len(wildfire['affected_tree_ids'])} trees affected")

    stats = router.handle({'action': 'getSessionStats'})['data']
    print("\nSession Stats:")
    print(f"  Duration: {stats['durationText']}")
    print(f"  Focus score: {stats['focus_score']}%")
    print(f"  Focused time: {stats['focused_time']}")
    print(f"  Distractions: {stats['distraction_count']}")
    print(f"  Trees grown / burned: {stats['trees_grown']} / {stats['trees_burned']}")


def main():
    store = SharedStateStore()
    tracker = ForestTracker(store, focus_interval=5, wildfire_interval=1, idle_interval=10)
    router = CommandRouter(tracker, SessionAnalytics(store))

    print("Distraction sites:", ", ".join(s.domain for s in get_distraction_sites(store) if s.enabled))

    if tracker.resume():
        print("Resumed previous session")
    else:
        response = router.handle({'action': 'startSession'})
        print(f"Started session {response['sessionId']}")

    try:
        # A short simulated browsing session
        visits = [
            (1, "https://github.com/pallets/flask"),
            (1, "https://github.com/pallets/flask/issues"),
            (2, "https://docs.python.org/3/library/logging.html"),
            (3, "https://www.youtube.com/watch?v=dQw4w9WgXcQ"),
            (2, "https://docs.python.org/3/library/threading.html"),
        ]
        for tab_id, url in visits:
            router.handle({'action': 'tabChanged', 'tabId': tab_id, 'url': url})
            router.handle({'action': 'userActivity', 'eventType': 'keyboard'})
            time.sleep(3)

        analysis = router.handle({'action': 'triggerFocusAnalysis'})
        if analysis['success']:
            print(f"\nFocus analysis: {analysis['data']['reasoning']}")
            for suggestion in analysis['data']['suggestions']:
                print(f"  - {suggestion}")

        display_forest(router)
    except KeyboardInterrupt:
        print("\nStopping...")
    finally:
        router.handle({'action': 'endSession'})
        store.close()


if __name__ == "__main__":
    main()
