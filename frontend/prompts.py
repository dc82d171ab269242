# frontend/prompts.py

DEFAULT_PROMPT = """Create a cinematic professional football (soccer) poster featuring the person in the foreground of the uploaded image (wearing the white shirt). Keep his original face, hair, shape, and angle exactly as in the image. Show the person in three perspectives: a super close-up portrait wearing a Manchester United away jersey 25/26, a side profile view wearing a Manchester United away jersey 25/26 with the name "Sourabh" on the back, and a full-body shot in a full football kit (Manchester United away jersey 25/26, shorts, socks, and cleats) with sponsor logos.

At the bottom, place a dynamic action scene of the player performing a powerful kick with motion blur and flying grass around. The jersey must clearly display the number "01" on the front, back, and shorts.

Use a bold dark blue stadium background with a large number "05" and the name "Sourabh" glowing behind the character. The overall style should be ultra-realistic, high-resolution, cinematic, and professional sports poster vibes."""
