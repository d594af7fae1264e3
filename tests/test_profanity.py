import unittest

from app.chat.profanity import MASK_CHAR, filter_profanity


class TestProfanityFilter(unittest.TestCase):

    def test_masks_word_and_keeps_length(self):
        text = "this is shit"
        filtered = filter_profanity(text)
        self.assertEqual(filtered, "this is " + MASK_CHAR * 4)
        self.assertEqual(len(filtered), len(text))

    def test_case_insensitive(self):
        self.assertEqual(filter_profanity("Damn mosquitoes"), "**** mosquitoes")

    def test_whole_words_only(self):
        # "hello", "class" and "shell" contain banned words but are not banned
        text = "hello class, check the shell"
        self.assertEqual(filter_profanity(text), text)

    def test_clean_text_unchanged(self):
        text = "Empty the water coolers every week"
        self.assertEqual(filter_profanity(text), text)


if __name__ == "__main__":
    unittest.main()
