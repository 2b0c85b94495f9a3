import unittest

from infrastructure.state.memory_cell import MemoryCell, MemoryCellStore


class MemoryCellTests(unittest.TestCase):
    def test_subscribe_receives_current_value_then_changes(self):
        cell = MemoryCell(0)
        seen = []

        cell.subscribe(seen.append)
        cell.set(1)
        cell.update(lambda value: value + 1)

        self.assertEqual(seen, [0, 1, 2])
        self.assertEqual(cell.get(), 2)

    def test_setting_an_equal_value_does_not_notify(self):
        cell = MemoryCell(None)
        seen = []
        cell.subscribe(seen.append)

        cell.set(None)

        self.assertEqual(seen, [None])

    def test_unsubscribe_stops_notifications(self):
        cell = MemoryCell("a")
        seen = []
        unsubscribe = cell.subscribe(seen.append)

        unsubscribe()
        cell.set("b")
        # Calling it twice is harmless.
        unsubscribe()

        self.assertEqual(seen, ["a"])

    def test_subscriber_may_unsubscribe_while_notified(self):
        cell = MemoryCell(0)
        seen = []
        unsubscribe = None

        def once(value):
            seen.append(value)
            if value and unsubscribe is not None:
                unsubscribe()

        unsubscribe = cell.subscribe(once)
        other = []
        cell.subscribe(other.append)

        cell.set(1)
        cell.set(2)

        self.assertEqual(seen, [0, 1])
        self.assertEqual(other, [0, 1, 2])


class MemoryCellStoreTests(unittest.TestCase):
    def test_batch_holds_notifications_until_all_writes_land(self):
        store = MemoryCellStore()
        hand = store(None)
        offset = store(0)
        seen = []
        hand.subscribe(lambda value: seen.append(("hand", value, offset.get())))
        offset.subscribe(lambda value: seen.append(("offset", value, hand.get())))
        seen.clear()

        with store.batch():
            hand.set("2k")
            offset.set(5)
            self.assertEqual(seen, [])
            self.assertEqual(hand.get(), "2k")

        self.assertEqual(seen, [("hand", "2k", 5), ("offset", 5, "2k")])

    def test_cell_written_twice_in_a_batch_notifies_once_with_final_value(self):
        store = MemoryCellStore()
        cell = store(0)
        seen = []
        cell.subscribe(seen.append)

        with store.batch():
            cell.set(1)
            cell.set(2)

        self.assertEqual(seen, [0, 2])

    def test_nested_batches_flush_on_outermost_exit(self):
        store = MemoryCellStore()
        cell = store("a")
        seen = []
        cell.subscribe(seen.append)

        with store.batch():
            with store.batch():
                cell.set("b")
            self.assertEqual(seen, ["a"])

        self.assertEqual(seen, ["a", "b"])

    def test_cells_outside_a_batch_notify_immediately(self):
        store = MemoryCellStore()
        cell = store(0)
        seen = []
        cell.subscribe(seen.append)

        cell.set(1)

        self.assertEqual(seen, [0, 1])


if __name__ == "__main__":
    unittest.main()
